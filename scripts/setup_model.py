#!/usr/bin/env python3
"""
Setup script for downloading the MobileNet classifier and its label table.
"""

import os
import sys
import tarfile
import urllib.request
import argparse

MODEL_BASE_URL = "https://storage.googleapis.com/download.tensorflow.org/models/tflite_11_05_08"
LABELS_URL = "https://raw.githubusercontent.com/pytorch/hub/master/imagenet_classes.txt"


def download_model(model_name: str = "mobilenet_v2_0.5_96", model_dir: str = "models/mobilenetv2") -> bool:
    """Download a MobileNet archive and keep only its frozen graph."""
    model_url = f"{MODEL_BASE_URL}/{model_name}.tgz"
    archive_path = f"{model_name}.tgz"
    frozen_name = f"{model_name}_frozen.pb"

    print(f"📥 Downloading {model_name}...")
    print(f"   URL: {model_url}")

    try:
        urllib.request.urlretrieve(model_url, archive_path)
        print(f"✅ Downloaded {archive_path}")

        print(f"📦 Extracting {frozen_name} to {model_dir}...")
        with tarfile.open(archive_path, "r:gz") as tar:
            members = [m for m in tar.getmembers() if os.path.basename(m.name) == frozen_name]
            if not members:
                print(f"❌ {frozen_name} not found in archive")
                return False
            member = members[0]
            member.name = frozen_name
            tar.extract(member, model_dir)

        os.remove(archive_path)
        print(f"🗑️  Removed {archive_path}")

        model_path = os.path.join(model_dir, frozen_name)
        if os.path.exists(model_path):
            print(f"✅ Model saved to {model_path}")
            return True
        print("❌ Model extraction failed")
        return False

    except Exception as e:
        print(f"❌ Error downloading model: {e}")
        if os.path.exists(archive_path):
            os.remove(archive_path)
        return False


def download_labels(model_dir: str = "models/mobilenetv2") -> bool:
    """Download the ImageNet label table (1000 classes, no background entry)."""
    labels_path = os.path.join(model_dir, "imagenet_classes.txt")
    print(f"📥 Downloading label table to {labels_path}...")
    try:
        urllib.request.urlretrieve(LABELS_URL, labels_path)
    except Exception as e:
        print(f"❌ Error downloading labels: {e}")
        return False
    with open(labels_path, "r", encoding="utf-8") as fh:
        count = sum(1 for line in fh if line.strip())
    print(f"✅ {count} labels saved")
    return True


def main():
    """Main function for model setup."""
    parser = argparse.ArgumentParser(description="Setup the FaceCam image classifier")
    parser.add_argument("--model", default="mobilenet_v2_0.5_96",
                        help="Model name to download (default: mobilenet_v2_0.5_96)")
    parser.add_argument("--dir", default="models/mobilenetv2",
                        help="Directory to save the model to (default: models/mobilenetv2)")

    args = parser.parse_args()

    print("🧠 FaceCam - Model Setup")
    print("=" * 50)

    os.makedirs(args.dir, exist_ok=True)

    success = download_model(args.model, args.dir) and download_labels(args.dir)

    if success:
        print("\n🎉 Model setup complete!")
        print(f"   Model dir: {args.dir}")
        print("\nYou can now run FaceCam:")
        print("   facecam")
    else:
        print("\n❌ Model setup failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
