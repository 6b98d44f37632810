# MP3 Auto Tagger - AI-assisted MP3 metadata tagger
# Copyright (C) 2025 Dr. William Nelson Leonard
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.

"""
Tag mapping for MP3 Auto Tagger
Converts an edited metadata record into the tag set handed to the ID3 writer
"""
from config import DEFAULT_LANGUAGE, DEFAULT_SONG_FLAG, logger as default_logger
from core.errors import UnsupportedSourceError, InvalidPathError
from core.album_art.loader import load_cover_image
from core.metadata.models import MetadataRecord, TagSetBuilder, as_text

# User-defined text frames written on every tag write, in this order
CORE_USER_TEXT = ('SUBGENRE', 'TECHNICAL', 'KEYWORDS', 'MOOD', 'USAGE')

# Standard frames written only when the user supplied a value
EXTENDED_FRAMES = (
    ('bpm', 'TBPM'),
    ('initial_key', 'TKEY'),
    ('composer', 'TCOM'),
    ('publisher', 'TPUB'),
    ('copyright', 'TCOP'),
    ('encoded_by', 'TENC'),
    ('encoding_settings', 'TSSE'),
    ('language', 'TLAN'),
    ('compilation', 'TCMP'),
    ('year', 'TYER'),
    ('track_number', 'TRCK'),
    ('date', 'TDAT'),
)

# TXXX frames written only when the user supplied a value
EXTENDED_USER_TEXT = (
    ('energy', 'ENERGY'),
    ('danceability', 'DANCEABILITY'),
    ('acousticness', 'ACOUSTICNESS'),
    ('instrumental', 'INSTRUMENTAL'),
    ('tempo_category', 'TEMPO_CATEGORY'),
)


def join_list(value):
    """Comma-join list fields; anything else is taken as already joined"""
    if isinstance(value, (list, tuple)):
        return ', '.join(str(v) for v in value)
    if value is None:
        return ''
    return as_text(value)


def build_tag_set(metadata, single_file=False, image_loader=load_cover_image, logger=None):
    """
    Map a metadata record onto an ID3 tag set

    Args:
        metadata: MetadataRecord or the client's metadata dict
        single_file: Single-file write path, which also writes CREATIVE and SONG
        image_loader: Callable(source, description) -> CoverImage
        logger: Logger for skipped cover art

    Returns:
        TagSet
    """
    log = logger or default_logger
    record = MetadataRecord.from_dict(metadata)
    language = record.language or DEFAULT_LANGUAGE

    builder = TagSetBuilder()
    builder.standard('title', record.title)
    builder.standard('artist', record.artist)
    builder.standard('album', record.subgenre or record.album)
    builder.standard('genre', record.genre)
    builder.comment(language, record.technical)
    builder.lyrics(language, record.lyrics)

    if record.cover_art:
        description = 'Album cover' if single_file else 'Cover'
        try:
            builder.image(image_loader(record.cover_art, description))
        except (UnsupportedSourceError, InvalidPathError) as e:
            log.warning(f"Skipping cover art: {e}")
        except (OSError, ValueError) as e:
            log.error(f"Could not read cover art, skipping image: {e}")

    core_values = {
        'SUBGENRE': record.subgenre,
        'TECHNICAL': record.technical,
        'KEYWORDS': join_list(record.keywords),
        'MOOD': join_list(record.mood),
        'USAGE': join_list(record.usage),
    }
    for key in CORE_USER_TEXT:
        builder.user_text(key, core_values[key])

    if single_file:
        builder.user_text('CREATIVE', record.creative)
        builder.user_text('SONG', str(record.song or DEFAULT_SONG_FLAG))

    for attribute, key in EXTENDED_USER_TEXT:
        value = getattr(record, attribute)
        if value is not None:
            builder.user_text(key, join_list(value))

    for attribute, frame_id in EXTENDED_FRAMES:
        builder.frame(frame_id, getattr(record, attribute))

    return builder.build()
