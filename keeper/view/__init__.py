from .view_widget import KeeperViewWidget

__all__ = ["KeeperViewWidget"]
