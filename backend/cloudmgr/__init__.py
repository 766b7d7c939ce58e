"""CloudMgr backend: WebDAV proxy and storage dispatcher."""

__version__ = "1.0.0"
