from srcboot.cli import main

main()
