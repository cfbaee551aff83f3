from drop_server.main import run

run()
