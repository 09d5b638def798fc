from agroconnect import create_app

# Create the Flask application instance
# WSGI servers look for the 'app' variable in this file
app = create_app()

if __name__ == "__main__":
    app.run()
