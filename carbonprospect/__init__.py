# -*- coding: utf-8 -*-
"""
CarbonProspect
==============

Emissions accounting and reduction-scenario engine for the CarbonProspect
carbon marketplace.

Sub-packages:
    - footprint: inventory aggregation, strategy evaluation, financial
      projection, compliance classification and scenario persistence
    - cli: ``carbonprospect`` command-line interface
"""

__version__ = "0.4.0"

from carbonprospect.exceptions import CarbonProspectException

__all__ = ["__version__", "CarbonProspectException"]
