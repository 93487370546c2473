"""
Topic Digest - turn a topic into a short social digest.

Fetches recent posts from unique authors, distills them into a summary,
ranked keywords and one suggested post, then runs the suggested post
through a safety classifier.
"""

__version__ = "0.1.0"
