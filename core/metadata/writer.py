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
ID3 writing operations for MP3 Auto Tagger
Handles applying a tag set to an MP3 file using Mutagen

This module uses Mutagen (https://github.com/quodlibet/mutagen)
Licensed under LGPL-2.1+ for audio metadata operations.
"""
import os

from mutagen.id3 import (
    ID3, ID3NoHeaderError, Frames,
    TIT2, TPE1, TALB, TCON, COMM, USLT, APIC, TXXX
)

from config import ID3_VERSION, DEFAULT_LANGUAGE, logger

UTF8 = 3

# ISO 639-1 codes the analysis service tends to return, mapped to ID3's ISO 639-2
LANGUAGE_CODES = {
    'en': 'eng', 'fr': 'fra', 'es': 'spa', 'de': 'deu', 'it': 'ita',
    'pt': 'por', 'nl': 'nld', 'ja': 'jpn', 'zh': 'zho', 'ko': 'kor',
    'ru': 'rus', 'ar': 'ara', 'hi': 'hin', 'sv': 'swe', 'pl': 'pol'
}

STANDARD_FRAMES = (
    ('title', TIT2),
    ('artist', TPE1),
    ('album', TALB),
    ('genre', TCON),
)


def id3_language(language):
    """Normalize a language tag to the three-letter code ID3 frames carry"""
    code = (language or '').strip().lower()
    if len(code) == 3 and code.isascii() and code.isalpha():
        return code
    return LANGUAGE_CODES.get(code, DEFAULT_LANGUAGE)


def load_id3(filepath):
    """Load existing ID3 tags, or start an empty tag if the file has none"""
    try:
        return ID3(filepath)
    except ID3NoHeaderError:
        return ID3()


def apply_tag_set(tags, tag_set):
    """
    Put a tag set's frames into an ID3 tag

    Frames the tag set manages replace existing ones; unrelated frames
    (other TXXX keys, described comments, existing art when no new image
    is given) are left alone.
    """
    for name, frame_cls in STANDARD_FRAMES:
        tags.setall(frame_cls.__name__, [frame_cls(encoding=UTF8, text=[getattr(tag_set, name)])])

    if tag_set.comment is not None:
        kept = [frame for frame in tags.getall('COMM') if frame.desc]
        tags.setall('COMM', kept)
        tags.add(COMM(
            encoding=UTF8,
            lang=id3_language(tag_set.comment.language),
            desc='',
            text=[tag_set.comment.text]
        ))

    tags.delall('USLT')
    if tag_set.unsynchronised_lyrics is not None:
        tags.add(USLT(
            encoding=UTF8,
            lang=id3_language(tag_set.unsynchronised_lyrics.language),
            desc='',
            text=tag_set.unsynchronised_lyrics.text
        ))

    if tag_set.image is not None:
        tags.delall('APIC')
        tags.add(APIC(
            encoding=UTF8,
            mime=tag_set.image.mime_type,
            type=tag_set.image.picture_type,
            desc=tag_set.image.description,
            data=tag_set.image.data
        ))

    for entry in tag_set.user_defined_text:
        # Mutagen drops empty text frames on save, so an empty value clears the key
        if entry.value:
            tags.add(TXXX(encoding=UTF8, desc=entry.key, text=[entry.value]))
        else:
            tags.delall(f"TXXX:{entry.key}")

    for entry in tag_set.extended_frames:
        if entry.frame_id in ('TYER', 'TDAT'):
            # A loaded TDRC would be converted back over these on a v2.3 save
            tags.delall('TDRC')
        if entry.frame_id == 'TLAN':
            value = id3_language(entry.value)
        else:
            value = entry.value
        tags.setall(entry.frame_id, [Frames[entry.frame_id](encoding=UTF8, text=[value])])


def write_tag_set(filepath, tag_set, id3_version=ID3_VERSION):
    """
    Write a tag set into an MP3 file

    Args:
        filepath: Path to the MP3 file (must exist)
        tag_set: TagSet built by the tag mapper
        id3_version: 3 or 4

    Raises:
        Exception: For any error raised by Mutagen or the filesystem
    """
    tags = load_id3(filepath)
    apply_tag_set(tags, tag_set)

    if id3_version == 3:
        tags.update_to_v23()
        tags.save(filepath, v2_version=3)
    else:
        tags.save(filepath, v2_version=4)

    logger.info(f"Wrote ID3v2.{id3_version} tags to {os.path.basename(filepath)}")
