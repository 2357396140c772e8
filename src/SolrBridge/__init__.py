"""SolrBridge: translate abstract search queries into Solr requests.

The translation layer (`SolrBridge.query`, `SolrBridge.response`) is pure;
only `SolrBridge.gateway` talks to the network.
"""

from __future__ import annotations

__version__ = "0.1.0"
