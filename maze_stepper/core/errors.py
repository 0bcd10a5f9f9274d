class MazeError(Exception):
    """Base class for every error raised by the maze core."""


class InvalidDimension(MazeError, ValueError):
    def __init__(self, width: int, height: int):
        super().__init__(f"Invalid grid dimensions {width}x{height}: width and height must be >= 1")
        self.width = width
        self.height = height


class InvalidPosition(MazeError, ValueError):
    pass


class InvalidAdjacency(MazeError, AssertionError):
    """
    Raised when a wall removal is attempted between cells that are not 4-adjacent.
    This is a bug in whichever generator asked for it, never a runtime condition.
    """


class NoPathFound(MazeError):
    def __init__(self, start, end):
        super().__init__(f"No path found from {start} to {end}")
        self.start = start
        self.end = end


class ConcurrentRunRejected(MazeError):
    pass


class InvalidStateTransition(MazeError):
    pass


class UnknownAlgorithm(MazeError, ValueError):
    pass


class InvalidInterval(MazeError, ValueError):
    def __init__(self, interval_ms):
        super().__init__(f"Step interval must be >= 0 ms, got {interval_ms}")
        self.interval_ms = interval_ms
