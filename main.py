#!/usr/bin/env python3
from __future__ import annotations

"""Entrypoint: prompt for a CEP and print the fastest source's answer."""

import sys

from cep_race.cli import main

if __name__ == "__main__":
    sys.exit(main())
