import uvicorn


def run_backend():
    uvicorn.run(
        "cloudnest.main:app",
        host="0.0.0.0",
        port=8000,
        reload=False
    )


if __name__ == "__main__":
    run_backend()
