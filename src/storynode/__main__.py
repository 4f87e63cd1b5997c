from storynode.main import main

main()
