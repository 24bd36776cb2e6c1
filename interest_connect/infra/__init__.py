"""Infrastructure adapters: postgres, redis, tokens and passwords."""
