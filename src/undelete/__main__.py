def main() -> None:
    from undelete.clients import disc

    disc.run()


if __name__ == "__main__":
    main()
