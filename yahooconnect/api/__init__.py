"""
API layer for Yahoo Finance.

- connector: data requests with crumb enrichment
- crumb: crumb acquisition and the shared crumb cache
- consent: consent page negotiation used when the crumb is refused
"""

from .connector import YahooConnector
from .consent import Consent, ConsentNegotiator
from .crumb import Credential, CrumbAcquirer, CrumbCache


__all__ = [
    "YahooConnector",
    "CrumbCache",
    "CrumbAcquirer",
    "Credential",
    "ConsentNegotiator",
    "Consent",
]
