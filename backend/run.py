from jogo_empatia import create_app, socketio

app = create_app()
 
if __name__ == '__main__':
    # Use SocketIO server so kiosk screens and the card reader bridge get websockets
    socketio.run(app, debug=True)
