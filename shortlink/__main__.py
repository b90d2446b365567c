from shortlink.main import run

run()
