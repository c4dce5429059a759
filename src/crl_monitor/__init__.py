"""
crl_monitor — CRL freshness sensor.

Fetches a certificate revocation list (and its delta CRL) over HTTP,
pulls the issuer common name, thisUpdate and nextUpdate out of the raw
bytes with an anchor-scanning heuristic, and reports how fresh the CRL is
in PRTG's EXE/XML sensor format.

Built on the Railway-Oriented Programming (ROP) framework for
explicit, composable, functional error handling.
"""

__version__ = "0.1.0"
