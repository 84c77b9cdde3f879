from pushci.cli import main

main()
