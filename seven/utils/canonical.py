import orjson


def dumps(d: dict) -> str:
    # compact, no whitespace
    return orjson.dumps(d).decode("utf-8")
