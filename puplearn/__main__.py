from puplearn.cli.main import main

main()
