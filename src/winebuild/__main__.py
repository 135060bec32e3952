from winebuild.cli import main

main()
