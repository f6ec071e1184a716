"""Ad Reel - turn short marketing scripts into rendered videos."""

__version__ = "0.1.0"
