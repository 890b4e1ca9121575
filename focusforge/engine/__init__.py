"""Session/state engine: time helpers, leveling table, intents, reducer and store."""
