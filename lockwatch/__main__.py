from lockwatch.app import cli

def main():
    """Console script entry point (`lockwatch`)."""
    cli()

# Development mode
if __name__ == "__main__":
    main()
