from authrelay.main import run

run()
