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
Configuration and constants for MP3 Auto Tagger
"""
import os

# Project root (uploads/, exports/ and dist/ live here when running standalone)
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Deployment target: 'standalone', 'vercel' or 'netlify'.
# Empty means autodetect from the platform environment variables.
DEPLOY_TARGET = os.environ.get('DEPLOY_TARGET', '').strip().lower()

# Server configuration
PORT = int(os.environ.get('PORT', '3002'))
HOST = os.environ.get('HOST', '0.0.0.0')

# Static front-end build
STATIC_DIR = os.environ.get('STATIC_DIR', os.path.join(BASE_DIR, 'dist'))

# Uploads
AUDIO_EXTENSIONS = ('.mp3',)
ALLOWED_UPLOAD_MIME_TYPES = ('audio/mpeg', 'audio/mp3')
MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', str(200 * 1024 * 1024)))

# ID3 writing
ID3_VERSION = int(os.environ.get('ID3_VERSION', '3'))
DEFAULT_LANGUAGE = 'eng'
DEFAULT_SONG_FLAG = '1'

# File naming
MAX_FILENAME_LENGTH = 200

# Gemini configuration
GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY', '').strip()
GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-1.5-pro')

ANALYSIS_GENERATION_CONFIG = {
    'temperature': 0.2,
    'top_k': 40,
    'top_p': 0.95,
    'max_output_tokens': 1024,
}

COVER_GENERATION_CONFIG = {
    'temperature': 0.4,
    'top_k': 32,
    'top_p': 1,
    'max_output_tokens': 2048,
}

PLACEHOLDER_COVER_URL = 'https://via.placeholder.com/500x500?text=Generated+Cover+Art'

# Logging configuration
import logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Log startup configuration
logger.info(f"Starting with DEPLOY_TARGET={DEPLOY_TARGET or 'auto'}, ID3v2.{ID3_VERSION}")
logger.info(f"Gemini analysis {'enabled' if GEMINI_API_KEY else 'disabled (mock fallback)'}, model {GEMINI_MODEL}")
