from trellis.reports.console import ConsoleListener, TestStatus

__all__ = ["ConsoleListener", "TestStatus"]
