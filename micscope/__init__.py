"""micscope - real-time microphone spectrum analyzer."""

__version__ = "0.1.0"
