import uvicorn

from graffiti.config import cfg


def main():
    api = cfg["api"]
    uvicorn.run("graffiti.app:app", host=api["host"], port=api["port"], lifespan="on")


if __name__ == "__main__":
    main()
