"""Remote status sources and session providers.

Every source implements the ``StatusSource`` protocol: a ``read(handle)``
method performing one remote read and returning a ``StatusReading``.
Sources classify their own failures as ``FetchError``; the
``SnapshotFetcher`` stamps each reading with its capture time.

Sources never widen a scope they cannot resolve: an unknown cluster or
resource group is reported as ``FetchErrorKind.NOT_FOUND``.
"""

from pollwatch.sources.base import StatusSource
from pollwatch.sources.policy import PolicyScanSource
from pollwatch.sources.session import AzureTokenSession, VsphereSessionProvider
from pollwatch.sources.tasks import VsphereTaskSource
from pollwatch.sources.vsan import VsanResyncSource

__all__ = [
    "StatusSource",
    "VsanResyncSource",
    "VsphereTaskSource",
    "PolicyScanSource",
    "VsphereSessionProvider",
    "AzureTokenSession",
]
