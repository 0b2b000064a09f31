from protoc_gen_fastapi.cli.cli import main

if __name__ == "__main__":
    main()
