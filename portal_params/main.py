"""portal-params - channel request parameter processing powered by Robyn."""

from robyn import Robyn

from portal_params.api.channels import router as channels_router
from portal_params.core.lifespan import create_lifespan
from portal_params.core.logger import logger
from portal_params.core.settings import settings as st
from portal_params.events.temp_files import TempFileCleanupEvent

app = Robyn(__file__)

# Lifespan events
lifespan = create_lifespan(app)
lifespan.register(TempFileCleanupEvent)

app.startup_handler(lifespan.startup)
app.shutdown_handler(lifespan.shutdown)

# Routers
app.include_router(channels_router)


def main() -> None:
    logger.info("🚀 STARTING %s | HOST=%s | PORT=%s", st.API_NAME, st.API_HOST, st.API_PORT)
    app.start(host=st.API_HOST, port=st.API_PORT)


if __name__ == "__main__":
    main()
