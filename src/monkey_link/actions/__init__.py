"""Input types, gestures, selectors, intents, instrumentation."""
