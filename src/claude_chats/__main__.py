from claude_chats.cli import main

main()
