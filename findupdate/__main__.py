from findupdate.cli import main

main()
