from __future__ import annotations

OK = 0
ERR_USAGE = 2
ERR_IO = 3
ERR_CONFIG = 4
ERR_PARSE = 5
ERR_RESOLVE = 6
ERR_BUILD = 7
ERR_INTERNAL = 99
