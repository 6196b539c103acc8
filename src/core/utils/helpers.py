from json import JSONEncoder


class CustomJSONEncoder(JSONEncoder):
    def default(self, o):
        try:
            return str(o)
        except Exception:
            return super().default(o)
