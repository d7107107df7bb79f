from livetimer import create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server to enable websockets in dev
    print(f" Listening on http://localhost:{app.config['PORT']}")
    socketio.run(app, port=app.config['PORT'], debug=True, use_reloader=False)
