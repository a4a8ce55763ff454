class LeaderboardError(Exception):
    status_code = 500
    public_message = 'leaderboard error'

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message


class ValidationError(LeaderboardError):
    """Rejected before any storage access"""
    status_code = 400
    public_message = 'invalid submission'


class StorageUnavailable(LeaderboardError):
    """Connection, transaction or timeout failure in the backing store"""
    status_code = 500
    public_message = 'leaderboard storage failure'


class NotConfigured(LeaderboardError):
    status_code = 503
    public_message = 'leaderboard unavailable'
