from solis_chart.app import create_app
from solis_chart.config import AppConfig
from solis_chart.logging import setup_logging

config = AppConfig.from_env()
setup_logging(config.logging.level)

app = create_app(config)

if __name__ == "__main__":
    app.run(host=config.server.host, port=config.server.port)
