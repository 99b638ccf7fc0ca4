from camstore import create_app

app = create_app()

if __name__ == '__main__':
    app.logger.info('Starting Flask server...')
    app.logger.info('Camera rental storefront API running on %s', app.config['PUBLIC_APP_URL'])
    app.run(debug=True, port=5000)
