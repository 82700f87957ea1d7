from __future__ import annotations

from typing import TypeAlias

import chia_rs.sized_bytes

# transaction hashes are fixed-width 32 byte identities
bytes32: TypeAlias = chia_rs.sized_bytes.bytes32
