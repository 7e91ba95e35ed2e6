from scansynth.cli import main

main()
