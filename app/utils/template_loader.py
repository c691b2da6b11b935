import html
import os

BASE_PATH = os.path.join(os.path.dirname(__file__), "..", "static", "templates")

def load_template(filename: str, safe=(), **kwargs) -> str:
    """Rellena una plantilla HTML con str.format.

    Todos los valores se escapan salvo los nombrados en `safe`, que ya son HTML.
    """
    path = os.path.join(BASE_PATH, filename)
    with open(path, encoding="utf-8") as f:
        text = f.read()
    values = {
        key: value if key in safe else html.escape("" if value is None else str(value))
        for key, value in kwargs.items()
    }
    return text.format(**values)
