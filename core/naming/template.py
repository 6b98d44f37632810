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
Naming template engine for MP3 Auto Tagger
Substitutes {field} placeholders from a metadata record and sanitizes the result
"""
import re

from core.errors import EmptyResultError
from core.naming.sanitizer import sanitize, collapse_whitespace

# Predefined naming templates
NAMING_TEMPLATES = {
    'standard': {
        'name': 'Standard',
        'pattern': '{artist} - {title}',
        'description': 'Artist - Title'
    },
    'numbered': {
        'name': 'Numbered',
        'pattern': '{trackNumber}. {title}',
        'description': 'Numbered format for albums'
    },
    'detailed': {
        'name': 'Detailed',
        'pattern': '{artist} - {album} - {trackNumber} - {title}',
        'description': 'Artist, album, track number and title'
    },
    'genrePrefixed': {
        'name': 'Genre prefix',
        'pattern': '[{genre}] {artist} - {title}',
        'description': 'Genre in brackets before the standard format'
    },
    'yearSuffixed': {
        'name': 'Year suffix',
        'pattern': '{artist} - {title} ({year})',
        'description': 'Year in parentheses after the standard format'
    },
    'keyBpm': {
        'name': 'DJ format',
        'pattern': '{artist} - {title} [{initialKey}][{bpm}BPM]',
        'description': 'DJ format with musical key and BPM'
    }
}

PLACEHOLDER = re.compile(r'\{([^{}]*)\}')

# A bracketed group of the pattern, e.g. "[{bpm}BPM]" or "({year})"
BRACKET_GROUP = re.compile(r'\([^()\[\]]*\)|\[[^()\[\]]*\]')

# Marks the spot a placeholder was removed from until cleanup runs
REMOVED = '\x00'
SEPARATOR = r'[-–—_,;.]+'

EMPTY_WRAPPER = re.compile(r'[(\[]\s*\x00+\s*[)\]]')
LEADING_GAP = re.compile(r'^\s*\x00(?:\s*' + SEPARATOR + r')?\s*')
TRAILING_GAP = re.compile(r'\s*(?:' + SEPARATOR + r'\s*)?\x00\s*$')
DOUBLED_SEPARATOR = re.compile(r'(\s*' + SEPARATOR + r'\s*)\x00\s*' + SEPARATOR + r'\s*')


def resolve_template(template):
    """Return the pattern for a preset key, or the template itself"""
    preset = NAMING_TEMPLATES.get(template)
    if preset:
        return preset['pattern']
    return template


def _format_value(value):
    if isinstance(value, (list, tuple)):
        return ', '.join(str(v).strip() for v in value if v)
    return str(value)


def _template_fields(metadata):
    if metadata is None:
        return {}
    if hasattr(metadata, 'template_fields'):
        return metadata.template_fields()
    return dict(metadata)


def _field_text(fields, key):
    value = fields.get(key)
    text = _format_value(value) if value else ''
    return text if text.strip() else ''


def _drop_empty_groups(pattern, fields):
    """Replace bracketed groups whose placeholders all resolve to nothing with a removal marker"""
    def group(match):
        keys = PLACEHOLDER.findall(match.group(0))
        if keys and not any(_field_text(fields, key) for key in keys):
            return REMOVED
        return match.group(0)
    return BRACKET_GROUP.sub(group, pattern)


def _drop_removed_placeholders(text):
    """Delete removal markers together with the separators they leave dangling"""
    previous = None
    while previous != text:
        previous = text
        text = EMPTY_WRAPPER.sub(REMOVED, text)
        text = LEADING_GAP.sub('', text)
        text = TRAILING_GAP.sub('', text)
        text = DOUBLED_SEPARATOR.sub(r'\1', text)
    return text.replace(REMOVED, '')


def render(pattern, metadata):
    """
    Render a naming template into a file name (without extension)

    Args:
        pattern: Template such as '{artist} - {title}'
        metadata: MetadataRecord or dict keyed by the client field names

    Returns:
        str: Sanitized, non-empty file name

    Raises:
        EmptyResultError: If nothing is left after substitution and sanitization
    """
    fields = _template_fields(metadata)

    def substitute(match):
        return _field_text(fields, match.group(1)) or REMOVED

    result = _drop_empty_groups(pattern or '', fields)
    result = PLACEHOLDER.sub(substitute, result)
    result = _drop_removed_placeholders(result)
    result = collapse_whitespace(sanitize(result))

    if not result:
        raise EmptyResultError(f"Naming template '{pattern}' produced an empty file name")

    return result
