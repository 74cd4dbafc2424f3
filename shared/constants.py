# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

MIN_MESSAGE_LENGTH = 10

# Contact form throttling: at most this many inquiries per client key per window.
MAX_INQUIRIES_PER_WINDOW = 3
RATE_LIMIT_WINDOW_SECONDS = 60 * 60

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
ALLOWED_IMAGE_MIME_TYPES = ("image/jpeg", "image/png", "image/webp")
ALLOWED_UPLOAD_FOLDERS = ("projects", "profile", "temp")
DEFAULT_UPLOAD_FOLDER = "projects"

# Client-side cache policy.
CACHE_REFRESH_INTERVAL_SECONDS = 30 * 60
CACHE_DEDUPE_INTERVAL_SECONDS = 60
CACHE_RETRY_BASE_SECONDS = 5
CACHE_RETRY_MAX_SECONDS = 5 * 60
