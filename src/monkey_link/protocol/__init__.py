"""Monkey wire protocol - codec, session, connection establishment."""
