"""Redis Lua scripts for request counting.

Scripts run atomically on the Redis server, so no other command can
interleave between the steps they contain.
"""

# Increment the counter (INCR creates it at 1 when missing) and push its
# expiry to now + ttl in the same atomic step. A counter can never be left
# incremented without a refreshed TTL.
INCREMENT_AND_REFRESH_SCRIPT = """
    local counter_key = KEYS[1]
    local ttl = tonumber(ARGV[1])

    local count = redis.call('INCR', counter_key)
    redis.call('EXPIRE', counter_key, ttl)

    return count
"""
