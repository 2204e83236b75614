# Copyright (C) 2026 Daniel Iwugo
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published
# by the Free Software Foundation, either version 3 of the License.
# See <https://www.gnu.org/licenses/> for details.

# File: imcode/__init__.py
# Description: Keyword-placed LSB steganography for RGBA images.

__version__ = "1.0.0"
