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
AI metadata analysis for uploaded MP3 files
"""
import os
import re
import copy
import json
from typing import List, Dict, Optional

import google.generativeai as genai

from config import GEMINI_API_KEY, GEMINI_MODEL, ANALYSIS_GENERATION_CONFIG, logger as default_logger

ANALYSIS_PROMPT = """Analyze this MP3 audio file and provide the following information in JSON format:
- titles: An array of 8 creative title suggestions based on the audio content
- genre: The main music genre that best fits this audio
- subgenre: A more specific subgenre classification
- technical: A technical description of audio characteristics
- creative: A creative description of the audio content
- keywords: An array of up to 14 descriptive keywords
- mood: An array of mood descriptors
- usage: An array of potential usage scenarios
- lyrics: Any detected lyrics in the audio (empty string if none)
- language: The detected language of any vocals (empty string if instrumental)

Format your response as valid JSON only, with no additional text."""

REQUIRED_FIELDS = ['titles', 'genre', 'subgenre', 'technical', 'creative', 'keywords', 'mood', 'usage']
LIST_FIELDS = ['titles', 'keywords', 'mood', 'usage']

# Returned whenever the analysis service is unavailable or answers garbage
MOCK_ANALYSIS = {
    'titles': [
        'Summer Breeze', 'Ocean Waves', 'Sunset Dreams',
        'Coastal Journey', 'Beach Memories', 'Tropical Escape',
        'Island Vibes', 'Paradise Found'
    ],
    'genre': 'Electronic',
    'subgenre': 'Chillwave',
    'technical': '128 kbps, 44.1 kHz, stereo track with balanced frequency response',
    'creative': 'A dreamy electronic piece that evokes images of sunset beaches and ocean waves, '
                'with atmospheric pads and gentle percussion.',
    'keywords': [
        'relaxing', 'atmospheric', 'electronic', 'ambient', 'beach',
        'ocean', 'waves', 'sunset', 'tropical', 'chill',
        'summer', 'vacation', 'coastal', 'dreamy'
    ],
    'mood': ['calm', 'relaxed', 'peaceful', 'nostalgic'],
    'usage': ['meditation', 'background music', 'travel videos', 'relaxation'],
    'lyrics': '',
    'language': ''
}

CODE_FENCE = re.compile(r'^```(?:json)?\s*|\s*```$')


def mock_analysis(filename: str) -> Dict:
    """Placeholder analysis; files named '*lyrics*' get sample lyrics"""
    result = copy.deepcopy(MOCK_ANALYSIS)
    if 'lyrics' in filename:
        result['lyrics'] = 'Sample lyrics would go here...'
        result['language'] = 'en'
    return result


def gemini_model(api_key: str, model_name: str):
    """Configure the Gemini client and return a generative model"""
    genai.configure(api_key=api_key)
    return genai.GenerativeModel(model_name)


class AnalysisEngine:
    """Asks Gemini to describe an MP3 file, falling back to mock data"""

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None,
                 model_factory=gemini_model, logger=None):
        self.api_key = GEMINI_API_KEY if api_key is None else api_key
        self.model_name = model_name or GEMINI_MODEL
        self.model_factory = model_factory
        self.logger = logger or default_logger

    def analyze(self, filepath: str) -> Dict:
        """
        Analyze one MP3 file

        Returns:
            dict: titles, genre, subgenre, technical, creative, keywords,
            mood, usage, lyrics, language. Never raises; failures return
            the mock analysis.
        """
        filename = os.path.basename(filepath)

        if not self.api_key:
            self.logger.error("Gemini API key not found in environment variables, using mock analysis")
            return mock_analysis(filename)

        try:
            with open(filepath, 'rb') as f:
                audio_data = f.read()

            model = self.model_factory(self.api_key, self.model_name)
            response = model.generate_content(
                [ANALYSIS_PROMPT, {'mime_type': 'audio/mpeg', 'data': audio_data}],
                generation_config=ANALYSIS_GENERATION_CONFIG
            )
            text = response.text
        except Exception as e:
            self.logger.error(f"Error calling Gemini API for {filename}: {e}")
            return mock_analysis(filename)

        return self.parse_analysis(text, filename)

    def parse_analysis(self, text: str, filename: str) -> Dict:
        """Parse the model's JSON answer, filling gaps from the mock analysis"""
        try:
            data = json.loads(CODE_FENCE.sub('', (text or '').strip()))
        except json.JSONDecodeError as e:
            self.logger.error(f"Error parsing Gemini response for {filename}: {e}")
            return mock_analysis(filename)

        if not isinstance(data, dict):
            self.logger.error(f"Gemini response for {filename} is not a JSON object")
            return mock_analysis(filename)

        missing = [name for name in REQUIRED_FIELDS if not data.get(name)]
        if missing:
            self.logger.warning(f"Gemini response missing fields: {', '.join(missing)}. Using mock data for them.")
            data = {**mock_analysis(filename), **{k: v for k, v in data.items() if v}}

        for name in LIST_FIELDS:
            data[name] = self._as_list(data.get(name))

        data.setdefault('lyrics', '')
        data.setdefault('language', '')
        return data

    def _as_list(self, value) -> List[str]:
        if isinstance(value, list):
            return value
        if not value:
            return []
        return [part for part in re.split(r',\s*', str(value)) if part]


analysis_engine = AnalysisEngine()
