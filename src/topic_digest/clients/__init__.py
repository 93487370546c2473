"""Remote provider clients (search, language model, safety classifier)."""
