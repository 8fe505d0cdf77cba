"""Core — wire codec, backend client, intents, state reducer and store."""
