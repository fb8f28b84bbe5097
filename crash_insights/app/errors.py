class CrashAnalysisError(Exception):
    """Base exception for all crash analysis errors"""


class CrashNotFoundError(CrashAnalysisError):
    def __init__(self, crash_id: str):
        super().__init__(crash_id)

    @property
    def crash_id(self) -> str:
        return self.args[0]

    def __str__(self) -> str:
        return f"Crash not found: {self.crash_id}"
