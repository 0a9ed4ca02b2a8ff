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

from __future__ import annotations

from collections.abc import Iterator

import pytest

import structural.contracts as contracts_module


@pytest.fixture(autouse=True)
def isolate_verification_state() -> Iterator[None]:
    """Keep forced verification toggles from leaking between tests."""

    previous = contracts_module._forced_state
    yield
    contracts_module._forced_state = previous
