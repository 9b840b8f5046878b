"""Application entry point for the authcore service"""
import os

from authcore.app import create_app

if __name__ == "__main__":
    app = create_app(os.environ.get('AUTHCORE_CONFIG', 'default'))
    app.run(debug=app.config.get('DEBUG', False), host='127.0.0.1', port=5000)
