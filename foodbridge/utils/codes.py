import secrets


def generate_pickup_code(is_taken, length: int = 6) -> str:
	"""Return a numeric code for which ``is_taken(code)`` is false."""
	while True:
		code = f"{secrets.randbelow(10 ** length):0{length}d}"
		if not is_taken(code):
			return code
