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
Metadata record and tag set types for MP3 Auto Tagger
"""
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple, Union

from core.errors import ValidationError

# Attribute name -> key used by the web client, where they differ
CLIENT_KEYS = {
    'cover_art': 'coverArt',
    'initial_key': 'initialKey',
    'encoded_by': 'encodedBy',
    'encoding_settings': 'encodingSettings',
    'track_number': 'trackNumber',
    'tempo_category': 'tempoCategory',
}

TEXT_FIELDS = ('title', 'artist', 'album', 'subgenre', 'genre', 'technical', 'creative', 'language')
LIST_FIELDS = ('keywords', 'mood', 'usage')
OPTIONAL_FIELDS = (
    'lyrics', 'cover_art', 'song',
    'bpm', 'initial_key', 'composer', 'publisher', 'copyright', 'encoded_by',
    'encoding_settings', 'compilation', 'year', 'track_number', 'date',
    'energy', 'danceability', 'acousticness', 'instrumental', 'tempo_category',
)


def client_key(attribute):
    return CLIENT_KEYS.get(attribute, attribute)


def is_present(value):
    """True when a user actually supplied a value (0 and False count)"""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple)):
        return len(value) > 0
    return True


def as_text(value):
    """Render a scalar metadata value as frame text"""
    if isinstance(value, bool):
        return '1' if value else '0'
    return str(value)


@dataclass
class MetadataRecord:
    """One track's editable metadata"""
    title: str = ''
    artist: str = ''
    album: str = ''
    subgenre: str = ''
    genre: str = ''
    technical: str = ''
    creative: str = ''
    keywords: Union[List[str], str] = field(default_factory=list)
    mood: Union[List[str], str] = field(default_factory=list)
    usage: Union[List[str], str] = field(default_factory=list)
    language: str = ''
    lyrics: Optional[str] = None
    cover_art: Optional[str] = None
    song: Optional[str] = None
    bpm: Optional[Any] = None
    initial_key: Optional[str] = None
    composer: Optional[str] = None
    publisher: Optional[str] = None
    copyright: Optional[str] = None
    encoded_by: Optional[str] = None
    encoding_settings: Optional[str] = None
    compilation: Optional[Any] = None
    year: Optional[Any] = None
    track_number: Optional[Any] = None
    date: Optional[str] = None
    energy: Optional[Any] = None
    danceability: Optional[Any] = None
    acousticness: Optional[Any] = None
    instrumental: Optional[Any] = None
    tempo_category: Optional[str] = None

    @classmethod
    def from_dict(cls, data):
        """
        Build a record from the JSON object the client sends

        Unknown keys are ignored. Optional fields left empty by the user stay None.
        """
        if isinstance(data, cls):
            return data
        if not isinstance(data, dict):
            raise ValidationError('Metadata must be an object')

        values = {}
        for name in TEXT_FIELDS:
            value = data.get(name)
            values[name] = '' if value is None else as_text(value)
        for name in LIST_FIELDS:
            value = data.get(name)
            values[name] = [] if value is None else value
        for name in OPTIONAL_FIELDS:
            value = data.get(client_key(name))
            if is_present(value):
                values[name] = value
        return cls(**values)

    def template_fields(self) -> Dict[str, Any]:
        """Non-empty values keyed by client field name, for naming templates"""
        result = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if is_present(value):
                result[client_key(f.name)] = value
        return result


@dataclass(frozen=True)
class LanguageText:
    language: str
    text: str


@dataclass(frozen=True)
class CoverImage:
    mime_type: str
    data: bytes
    description: str = 'Cover'
    picture_type: int = 3  # front cover


@dataclass(frozen=True)
class UserText:
    key: str
    value: str


@dataclass(frozen=True)
class TextFrame:
    frame_id: str
    value: str


@dataclass(frozen=True)
class TagSet:
    """Everything one ID3 write puts into a file"""
    title: str = ''
    artist: str = ''
    album: str = ''
    genre: str = ''
    comment: Optional[LanguageText] = None
    unsynchronised_lyrics: Optional[LanguageText] = None
    image: Optional[CoverImage] = None
    user_defined_text: Tuple[UserText, ...] = ()
    extended_frames: Tuple[TextFrame, ...] = ()

    def user_text(self, key):
        for entry in self.user_defined_text:
            if entry.key == key:
                return entry.value
        return None

    def frame(self, frame_id):
        for entry in self.extended_frames:
            if entry.frame_id == frame_id:
                return entry.value
        return None

    def summary(self):
        """JSON-friendly view for logs and responses (image bytes omitted)"""
        result = {
            'title': self.title,
            'artist': self.artist,
            'album': self.album,
            'genre': self.genre,
            'userDefinedText': [{'key': e.key, 'value': e.value} for e in self.user_defined_text],
        }
        if self.comment:
            result['comment'] = {'language': self.comment.language, 'text': self.comment.text}
        if self.unsynchronised_lyrics:
            result['unsynchronisedLyrics'] = {
                'language': self.unsynchronised_lyrics.language,
                'text': self.unsynchronised_lyrics.text
            }
        if self.image:
            result['image'] = {
                'mimeType': self.image.mime_type,
                'description': self.image.description,
                'size': len(self.image.data)
            }
        for entry in self.extended_frames:
            result[entry.frame_id] = entry.value
        return result


class TagSetBuilder:
    """
    Accumulates tag set fields; only populated fields reach the TagSet

    User-defined keys keep the order they were first added in. Adding a key
    twice replaces the value in place.
    """

    def __init__(self):
        self._standard = {}
        self._comment = None
        self._lyrics = None
        self._image = None
        self._user_text = {}
        self._frames = {}

    def standard(self, name, value):
        self._standard[name] = value or ''
        return self

    def comment(self, language, text):
        self._comment = LanguageText(language, text or '')
        return self

    def lyrics(self, language, text):
        if text:
            self._lyrics = LanguageText(language, text)
        return self

    def image(self, image):
        self._image = image
        return self

    def user_text(self, key, value):
        self._user_text[key] = '' if value is None else value
        return self

    def frame(self, frame_id, value):
        if is_present(value):
            self._frames[frame_id] = as_text(value)
        return self

    def build(self):
        return TagSet(
            title=self._standard.get('title', ''),
            artist=self._standard.get('artist', ''),
            album=self._standard.get('album', ''),
            genre=self._standard.get('genre', ''),
            comment=self._comment,
            unsynchronised_lyrics=self._lyrics,
            image=self._image,
            user_defined_text=tuple(UserText(k, v) for k, v in self._user_text.items()),
            extended_frames=tuple(TextFrame(k, v) for k, v in self._frames.items()),
        )
