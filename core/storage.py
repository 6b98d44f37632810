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
Storage locations for MP3 Auto Tagger
Selects where uploads and exports live for each hosting target
"""
import os
import tempfile

from config import BASE_DIR, DEPLOY_TARGET, logger

SERVERLESS_DIR_NAME = 'mp3-auto-tagger-uploads'
SERVERLESS_EXPORTS_DIR_NAME = 'mp3-auto-tagger-exports'


class StorageLocationProvider:
    """Where uploaded files and JSON exports are kept"""

    name = 'standalone'

    def __init__(self, root):
        self.root = root

    @property
    def uploads_dir(self):
        return self._ensure(os.path.join(self.root, 'uploads'))

    @property
    def exports_dir(self):
        return self._ensure(os.path.join(self.root, 'exports'))

    def _ensure(self, path):
        os.makedirs(path, exist_ok=True)
        return path


class StandaloneStorage(StorageLocationProvider):
    """Plain server: uploads/ and exports/ next to the application"""

    def __init__(self, root=BASE_DIR):
        super().__init__(root)


class ServerlessStorage(StorageLocationProvider):
    """Serverless functions can only write under the temp directory"""

    def __init__(self, name, root=None):
        super().__init__(root or os.path.join(tempfile.gettempdir(), SERVERLESS_DIR_NAME))
        self.name = name

    @property
    def uploads_dir(self):
        return self._ensure(self.root)

    @property
    def exports_dir(self):
        # Sibling of the uploads directory, never inside it
        parent = os.path.dirname(os.path.abspath(self.root))
        return self._ensure(os.path.join(parent, SERVERLESS_EXPORTS_DIR_NAME))


def detect_deploy_target(environ=None):
    """Work out the hosting target from DEPLOY_TARGET or the platform variables"""
    environ = os.environ if environ is None else environ
    target = environ.get('DEPLOY_TARGET', DEPLOY_TARGET).strip().lower()
    if target:
        return target
    if environ.get('VERCEL') == '1':
        return 'vercel'
    if environ.get('NETLIFY') == 'true':
        return 'netlify'
    return 'standalone'


def get_storage_provider(target=None):
    """Build the storage provider for a deploy target"""
    target = target or detect_deploy_target()

    if target in ('vercel', 'netlify'):
        provider = ServerlessStorage(target)
    elif target == 'standalone':
        provider = StandaloneStorage()
    else:
        raise ValueError(f"Unknown deploy target: {target}")

    logger.info(f"Using {provider.name} storage, uploads in {provider.uploads_dir}")
    return provider
