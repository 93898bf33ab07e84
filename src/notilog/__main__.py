from __future__ import annotations

from notilog.cli import main

main()
