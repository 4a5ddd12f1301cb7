from authsession.ui.app import MainWindow

__all__ = ["MainWindow"]
