"""
Avatar Studio: photo + template avatar generation on the Gemini image model.

The service stays a thin HTTP orchestrator: every image operation is one
request/response round trip to the remote API.
"""
