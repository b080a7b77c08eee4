import os

from foodbridge import create_app, socketio

app = create_app()


if __name__ == "__main__":
    socketio.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=os.getenv("FLASK_DEBUG") == "1", allow_unsafe_werkzeug=True)
