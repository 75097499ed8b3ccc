from .control_window import ControlWindow

__all__ = ["ControlWindow"]
