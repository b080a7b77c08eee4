from flask import request


def request_data():
	"""JSON body when one was sent, else the submitted form fields."""
	data = request.get_json(silent=True)
	if isinstance(data, dict):
		return data
	return request.form.to_dict()
