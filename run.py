# run.py

import uvicorn
from redirector.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "redirector.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        workers=1,
    )
