# -*- coding: utf-8 -*-
"""CarbonProspect command-line interface."""

from carbonprospect.cli.main import app, main

__all__ = ["app", "main"]
