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
Cover art generation for MP3 Auto Tagger
"""
import re
import base64
from urllib.parse import quote_plus

from config import GEMINI_API_KEY, GEMINI_MODEL, COVER_GENERATION_CONFIG, PLACEHOLDER_COVER_URL, logger
from core.inference import gemini_model

COVER_PROMPT = ("Create a 500x500 album cover for a track described by these keywords: {keywords}. "
                "Make it visually appealing, modern, and suitable for music streaming platforms. "
                "Return the image only.")

EMBEDDED_DATA_URI = re.compile(r'data:image/[\w.+-]+;base64,[A-Za-z0-9+/=]+')


def keyword_text(keywords):
    if isinstance(keywords, (list, tuple)):
        return ', '.join(str(k) for k in keywords if k)
    return str(keywords or '')


def placeholder_url(text=None):
    if not text:
        return PLACEHOLDER_COVER_URL
    return f"https://via.placeholder.com/500x500?text={quote_plus(text[:30])}"


def _image_from_response(response):
    """Find an inline image in a Gemini response and return it as a data URI"""
    for candidate in getattr(response, 'candidates', None) or []:
        content = getattr(candidate, 'content', None)
        for part in getattr(content, 'parts', None) or []:
            inline = getattr(part, 'inline_data', None)
            if inline is not None and getattr(inline, 'data', None):
                data = inline.data
                # Some SDK versions hand back the payload already base64 encoded
                if isinstance(data, str):
                    encoded = data
                else:
                    encoded = base64.b64encode(data).decode('ascii')
                return f"data:{inline.mime_type or 'image/png'};base64,{encoded}"
            text = getattr(part, 'text', None)
            if text:
                match = EMBEDDED_DATA_URI.search(text)
                if match:
                    return match.group(0)
    return None


def generate_cover_art(keywords, api_key=None, model_name=None, model_factory=gemini_model):
    """
    Generate cover art for a set of keywords

    Returns:
        dict: {'imageUrl': data URI or placeholder URL}. Never raises.
    """
    api_key = GEMINI_API_KEY if api_key is None else api_key
    text = keyword_text(keywords)

    if not api_key:
        logger.error("Gemini API key not found in environment variables, using placeholder cover")
        return {'imageUrl': PLACEHOLDER_COVER_URL}

    try:
        model = model_factory(api_key, model_name or GEMINI_MODEL)
        response = model.generate_content(
            COVER_PROMPT.format(keywords=text),
            generation_config=COVER_GENERATION_CONFIG
        )
        image_url = _image_from_response(response)
    except Exception as e:
        logger.error(f"Error generating cover art: {e}")
        return {'imageUrl': PLACEHOLDER_COVER_URL}

    if not image_url:
        logger.warning("No image in Gemini response, using placeholder cover")
        return {'imageUrl': placeholder_url(text)}

    return {'imageUrl': image_url}
